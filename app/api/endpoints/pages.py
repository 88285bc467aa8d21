from fastapi import APIRouter, Request

from app.api.deps import render

router = APIRouter()


@router.get("/")
async def home(request: Request):
    return render(request, "home.html", title="Home")


@router.get("/about")
async def about(request: Request):
    return render(request, "about.html", title="About")
