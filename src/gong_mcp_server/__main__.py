"""Main entry point for the Gong MCP server.

Run with: python -m gong_mcp_server
or: gong-mcp-server
"""

from gong_mcp_server.server import main

if __name__ == "__main__":
    main()
