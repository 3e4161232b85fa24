from petclaims import create_app

app = create_app()
