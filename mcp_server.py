"""Module-path entrypoint (``mcp_server:mcp``) for hosts that inspect a server object.

Running the file directly starts the stdio server with environment defaults.
"""

from renderbot.mcp.server import configure_renderer, main, mcp  # noqa: F401

__all__ = ["mcp", "configure_renderer", "main"]

if __name__ == "__main__":
    main()
