from polyclinic.api.schemas import CamelModel


class ResultRequest(CamelModel):
    data: str | None = None
    duty_id: int | None = None
    client_id: int | None = None
    doctor_id: int | None = None
