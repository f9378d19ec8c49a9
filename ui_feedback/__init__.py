"""UI feedback collector: browser widget webhook in, MCP tools out."""
