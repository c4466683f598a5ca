"""syncrelay core — adaptor registry, processor pipelines, send resolution
and the fan-out dispatch engine."""
