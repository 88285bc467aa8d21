from typing import Optional
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from app.api.deps import (
    ensure_login,
    get_data_service,
    parse_form,
    render,
    render_list,
    status_for,
)
from app.schemas.registry import StoreCreate, StoreUpdate
from app.services.data_service import DataService

router = APIRouter(dependencies=[Depends(ensure_login)])


@router.get("/stores")
async def list_stores(
    request: Request,
    retailer: Optional[str] = None,
    data: DataService = Depends(get_data_service),
):
    if retailer:
        result = await data.get_stores_by_retailer(retailer)
    else:
        result = await data.get_stores()
    return render_list(request, "stores.html", "stores", result, title="List of Stores")


@router.get("/stores/add")
async def add_store_form(request: Request):
    return render(request, "addStore.html", title="Add Store")


@router.post("/stores/add")
async def add_store(request: Request, data: DataService = Depends(get_data_service)):
    parsed = await parse_form(request, StoreCreate)
    result = await data.add_store(parsed.value) if parsed.ok else parsed
    if result.ok:
        return RedirectResponse("/stores", status_code=status.HTTP_303_SEE_OTHER)
    return render(
        request, "addStore.html", status_code=status_for(result.kind),
        title="Add Store", errorMessage="Unable to Add the Store",
    )


@router.get("/store/{store_id}")
async def view_store(request: Request, store_id: int, data: DataService = Depends(get_data_service)):
    found = await data.get_store_by_id(store_id)
    if found.ok and found.value:
        return render(request, "store.html", title="Store", store=found.value[0])
    return render(
        request, "store.html", status_code=status_for(found.kind) if not found.ok else status.HTTP_404_NOT_FOUND,
        title="Store", errorMessage="No such store" if found.ok else "Store Not Found",
    )


@router.post("/store/update")
async def update_store(request: Request, data: DataService = Depends(get_data_service)):
    parsed = await parse_form(request, StoreUpdate)
    result = await data.update_store(parsed.value) if parsed.ok else parsed
    if result.ok:
        return RedirectResponse("/stores", status_code=status.HTTP_303_SEE_OTHER)
    return render(
        request, "store.html", status_code=status_for(result.kind),
        title="Store", errorMessage="Unable to Update the Store",
    )


@router.get("/stores/delete/{store_id}")
async def delete_store(request: Request, store_id: int, data: DataService = Depends(get_data_service)):
    result = await data.delete_store_by_id(store_id)
    if result.ok:
        return RedirectResponse("/stores", status_code=status.HTTP_302_FOUND)
    return render(
        request, "stores.html", status_code=status_for(result.kind),
        title="List of Stores", errorMessage="Unable to Remove Store / Store Not Found",
    )
