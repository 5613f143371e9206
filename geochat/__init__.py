"""GeoChat: a location-aware chat service grounded in web search and maps."""
