"""Entry point for ``uvicorn main:app`` deployments."""
from api_football_mcp.app import app, main

if __name__ == "__main__":
    main()
