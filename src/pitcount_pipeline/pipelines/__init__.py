"""
pitcount_pipeline.pipelines — End-to-end pipeline orchestrators.

Each pipeline module exports a run() function that accepts keyword
configuration (defaulting to settings) and returns a result object.

    from pitcount_pipeline.pipelines import pit_report

    result = pit_report.run(target_year=2019, dry_run=True)
"""
