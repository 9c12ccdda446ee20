"""Image domain: request models, cache keys, orchestration, transformers."""
