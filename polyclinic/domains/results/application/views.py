from typing import Any

from polyclinic.api.schemas import CamelModel
from polyclinic.core.composition.snapshots import ClientSnapshot, DoctorSnapshot, DutySnapshot
from polyclinic.domains.results.domain import Result


class ResultView(CamelModel):
    """A result with its duty, doctor and client; unresolved ones are None."""

    id: int
    data: str | None = None
    duty_id: int | None = None
    doctor_id: int | None = None
    client_id: int | None = None
    duty: DutySnapshot | None = None
    doctor: DoctorSnapshot | None = None
    client: ClientSnapshot | None = None

    @classmethod
    def compose(cls, result: Result, resolved: dict[str, Any]) -> "ResultView":
        return cls(
            id=result.id,
            data=result.data,
            duty_id=result.duty_id,
            doctor_id=result.doctor_id,
            client_id=result.client_id,
            duty=resolved.get("duty"),
            doctor=resolved.get("doctor"),
            client=resolved.get("client"),
        )
