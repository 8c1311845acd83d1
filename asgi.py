"""
asgi.py -- Application assembly for HtmxTodo.

This is the ONLY file that imports from both api/ and web/. api/main.py owns
the app object, lifespan and middleware; web/ owns the HTML routes and the
HTML error pages.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app
from web.errors import register_error_handlers
from web.routes import router as web_router

app.include_router(web_router, tags=["Web UI"])
register_error_handlers(app)
