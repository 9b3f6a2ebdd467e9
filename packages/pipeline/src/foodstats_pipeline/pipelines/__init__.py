"""
foodstats_pipeline.pipelines — End-to-end pipeline orchestrators.

Each pipeline module exports a run() function that accepts keyword
arguments and returns {table_name: LoadResult}.

    from foodstats_pipeline.pipelines import family_food

    results = family_food.run(output_dir="data/reports")
"""
