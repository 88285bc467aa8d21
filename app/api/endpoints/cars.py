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
from app.schemas.registry import CarCreate
from app.services.data_service import DataService

router = APIRouter(dependencies=[Depends(ensure_login)])


@router.get("/cars")
async def list_cars(
    request: Request,
    vin: Optional[str] = None,
    year: Optional[str] = None,
    make: Optional[str] = None,
    data: DataService = Depends(get_data_service),
):
    """List cars, filtered by vin, year or make (first one given wins)."""
    if vin:
        result = await data.get_cars_by_vin(vin)
    elif year:
        result = await data.get_cars_by_year(year)
    elif make:
        result = await data.get_cars_by_make(make)
    else:
        result = await data.get_cars()
    return render_list(request, "cars.html", "cars", result, title="Cars")


@router.get("/cars/add")
async def add_car_form(request: Request):
    return render(request, "addCars.html", title="Add Car")


@router.post("/car/add")
async def add_car(request: Request, data: DataService = Depends(get_data_service)):
    parsed = await parse_form(request, CarCreate)
    result = await data.add_car(parsed.value) if parsed.ok else parsed
    if result.ok:
        return RedirectResponse("/cars", status_code=status.HTTP_303_SEE_OTHER)
    # Most often a vin that is already registered
    return render(
        request, "addCars.html", status_code=status_for(result.kind),
        title="Add Car", errorMessage="Unable to Add the Car",
    )


@router.get("/car/{vin}")
async def view_car(request: Request, vin: str, data: DataService = Depends(get_data_service)):
    found = await data.get_cars_by_vin(vin)
    if found.ok and found.value:
        return render(request, "car.html", title="Car", car=found.value[0])
    return render(
        request, "car.html", status_code=status_for(found.kind) if not found.ok else status.HTTP_404_NOT_FOUND,
        title="Car", errorMessage="Car Not Found",
    )


@router.post("/car/update")
async def update_car(request: Request, data: DataService = Depends(get_data_service)):
    parsed = await parse_form(request, CarCreate)
    result = await data.update_car(parsed.value) if parsed.ok else parsed
    if result.ok:
        return RedirectResponse("/cars", status_code=status.HTTP_303_SEE_OTHER)
    return render(
        request, "car.html", status_code=status_for(result.kind),
        title="Car", errorMessage="Unable to Update the Car",
    )


@router.get("/cars/delete/{vin}")
async def delete_car(request: Request, vin: str, data: DataService = Depends(get_data_service)):
    result = await data.delete_car_by_vin(vin)
    if result.ok:
        return RedirectResponse("/cars", status_code=status.HTTP_302_FOUND)
    return render(
        request, "cars.html", status_code=status_for(result.kind),
        title="List of Cars", errorMessage="Unable to Remove Car / Car Not Found",
    )
