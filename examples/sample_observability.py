import logging
import random

from studentdb.execution.observability import (
    ObservabilitySettings,
    QueryObservation,
    compose_event_observers,
    make_json_event_logger,
)
from studentdb.lifecycle import delete_database, initialize_database
from studentdb.query_runner import run_query

# ==================================================
# App-Level Observability Wiring
# ==================================================

events_logger = logging.getLogger("studentdb.events")
events_logger.setLevel(logging.INFO)
events_logger.addHandler(logging.StreamHandler())

connection_events: list[str] = []


def log_query(event: QueryObservation) -> None:
    print(
        f"[{event.database}] op={event.operation} success={event.succeeded} "
        f"duration_ms={event.duration_ms:.2f} params={event.param_count} metadata={dict(event.metadata)}"
    )


settings = ObservabilitySettings(
    query_observer=log_query,
    event_observer=compose_event_observers(
        make_json_event_logger(logger=events_logger),
        lambda event: connection_events.append(event.event),
    ),
    metadata={"service": "studentdb-sample"},
)

initialize_database("ObservedStudents", "", rng=random.Random(1), row_count=5, observability_settings=settings)
run_query("SELECT Name, GPA FROM Students ORDER BY GPA DESC", "ObservedStudents", observability_settings=settings)
delete_database("ObservedStudents")

print("connections opened:", connection_events.count("connection.acquire.end"))
print("connections closed:", connection_events.count("connection.close"))
