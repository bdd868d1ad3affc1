# clientdb/routers/pages.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import FileResponse, HTMLResponse

from clientdb.config import Settings
from clientdb.dependencies import get_settings

router = APIRouter(include_in_schema=False)

HOME_HTML = """
<h1>{app_name}</h1>
<p>Application is running and connected to the database.</p>
<a href="/clients.html">View Clients</a>
"""


@router.get("/", response_class=HTMLResponse)
def home(settings: Settings = Depends(get_settings)):
    return HOME_HTML.format(app_name=settings.APP_NAME)


@router.get("/clients")
def clients_page(settings: Settings = Depends(get_settings)):
    page = settings.STATIC_DIR / "clients.html"
    if not page.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return FileResponse(page, media_type="text/html")


@router.get("/favicon.ico")
def favicon():
    return Response(status_code=status.HTTP_204_NO_CONTENT)
