"""MCP server for territory-buildings.

Registers the detection tools and runs via stdio transport.
"""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .tools.detect import register_detect_tools

mcp = FastMCP(
    "territory-buildings",
    instructions="Detect buildings inside a user-drawn territory polygon, with addresses",
)

register_detect_tools(mcp)


def main():
    # stdout carries the stdio protocol, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
