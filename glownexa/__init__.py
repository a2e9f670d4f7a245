"""GlowNexa backend: contact relay, analysis history, media and identity glue."""
