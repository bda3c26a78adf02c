"""
Selection of the services a run waits on and shows logs for.
"""
from typing import Iterable, List, Sequence, Set
from ..MODELS.service_table import ServiceTable


def resolve_wait_set(requested: Sequence[str], test_services: ServiceTable) -> List[str]:
    """
    Determines which services must be waited on.

    Requested names are not checked against the test file; an unknown name
    fails later when the container runtime cannot find its container.

    :param requested: Service names given on the command line, possibly empty.
    :param test_services: Services declared in the test file.
    :return: The requested names, or every test service in declaration order.
    """
    if not requested:
        return test_services.names()
    return list(requested)


def collect_other_services(tables: Iterable[ServiceTable]) -> Set[str]:
    """
    Collects the names of services declared outside the test file.
    Their logs are only shown in verbose mode.
    """
    names: Set[str] = set()
    for table in tables:
        names.update(table.names())
    return names
