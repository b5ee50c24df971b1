from swapdesk import create_app

app = create_app()
