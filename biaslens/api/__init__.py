"""HTTP routers: articles, narratives, health."""
