from app.riel import create_app

app = create_app()
