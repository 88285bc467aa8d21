from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import RedirectResponse

from app.api.deps import ensure_login, get_picture_service, render, status_for
from app.services.picture_service import PictureService
from app.services.result import ErrorKind

router = APIRouter(dependencies=[Depends(ensure_login)])


@router.get("/pictures")
async def list_pictures(request: Request, pictures: PictureService = Depends(get_picture_service)):
    result = await pictures.get_pictures()
    if result.ok:
        return render(request, "pictures.html", title="Pictures", pictures=result.value)
    if result.kind == ErrorKind.NOT_FOUND:
        return render(request, "pictures.html", title="Pictures", errorMessage="No Images Available, Add Some!")
    return render(request, "pictures.html", status_code=status_for(result.kind),
                  title="Pictures", errorMessage=result.reason)


@router.get("/pictures/add")
async def add_picture_form(request: Request):
    return render(request, "addPicture.html", title="Add Picture")


@router.post("/pictures/add")
async def add_picture(
    request: Request,
    picture_file: UploadFile = File(..., alias="pictureFile"),
    pictures: PictureService = Depends(get_picture_service),
):
    content = await picture_file.read()
    result = await pictures.save_picture(picture_file.filename, content)
    if result.ok:
        return RedirectResponse("/pictures", status_code=status.HTTP_303_SEE_OTHER)
    return render(request, "addPicture.html", status_code=status_for(result.kind),
                  title="Add Picture", errorMessage=result.reason)
