"""Entry point for the Luma MCP server"""

from luma_mcp.run_server import main

if __name__ == "__main__":
    main()
