def main() -> None:
    """Entry point for the application: run the API server."""
    from collab_projects.api.main import main as api_main

    api_main()
