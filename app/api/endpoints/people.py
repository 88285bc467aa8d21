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
from app.schemas.registry import PersonCreate, PersonUpdate
from app.services.data_service import DataService

router = APIRouter(dependencies=[Depends(ensure_login)])


@router.get("/people")
async def list_people(
    request: Request,
    vin: Optional[str] = None,
    city: Optional[str] = None,
    data: DataService = Depends(get_data_service),
):
    """List people, optionally filtered by the vin they own or the city they live in."""
    if vin:
        result = await data.get_people_by_vin(vin)
    elif city:
        result = await data.get_people_by_city(city)
    else:
        result = await data.get_all_people()
    return render_list(request, "people.html", "people", result, title="People")


@router.get("/people/add")
async def add_person_form(request: Request, data: DataService = Depends(get_data_service)):
    cars = await data.get_cars()
    return render(request, "addPeople.html", title="Add Person", cars=cars.value if cars.ok else [])


@router.post("/people/add")
async def add_person(request: Request, data: DataService = Depends(get_data_service)):
    parsed = await parse_form(request, PersonCreate)
    result = await data.add_person(parsed.value) if parsed.ok else parsed
    if result.ok:
        return RedirectResponse("/people", status_code=status.HTTP_303_SEE_OTHER)

    cars = await data.get_cars()
    return render(
        request, "addPeople.html", status_code=status_for(result.kind),
        title="Add Person", errorMessage="Unable to Add the Person",
        cars=cars.value if cars.ok else [],
    )


@router.get("/person/{person_id}")
async def view_person(request: Request, person_id: int, data: DataService = Depends(get_data_service)):
    """Show one person with the list of cars to pick ownership from."""
    found = await data.get_people_by_id(person_id)
    if not found.ok or not found.value:
        return render(
            request, "person.html", status_code=status_for(found.kind) if not found.ok else status.HTTP_404_NOT_FOUND,
            title="Person", errorMessage="No such person",
        )

    person = found.value[0]
    cars = await data.get_cars()
    car_options = [
        dict(car.model_dump(), selected=(car.vin == person.vin))
        for car in (cars.value if cars.ok else [])
    ]
    return render(request, "person.html", title="Person", person=person, cars=car_options)


@router.post("/person/update")
async def update_person(request: Request, data: DataService = Depends(get_data_service)):
    parsed = await parse_form(request, PersonUpdate)
    result = await data.update_person(parsed.value) if parsed.ok else parsed
    if result.ok:
        return RedirectResponse("/people", status_code=status.HTTP_303_SEE_OTHER)
    return render(
        request, "person.html", status_code=status_for(result.kind),
        title="Person", errorMessage="Unable to Update the Person",
    )


@router.get("/people/delete/{person_id}")
async def delete_person(request: Request, person_id: int, data: DataService = Depends(get_data_service)):
    result = await data.delete_person_by_id(person_id)
    if result.ok:
        return RedirectResponse("/people", status_code=status.HTTP_302_FOUND)
    return render(
        request, "people.html", status_code=status_for(result.kind),
        title="People", errorMessage="Unable to Remove Person / Person Not Found",
    )
