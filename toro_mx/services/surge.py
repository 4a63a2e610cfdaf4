from toro_mx.core.enums import ServiceType

NO_SURGE = 1.0


def current_surge(zone_id: int, service_type: ServiceType) -> float:
    # TODO: derive from open requests vs. available drivers per zone
    return NO_SURGE
