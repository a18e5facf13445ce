from datetime import timedelta


def slot(monday, day, hour, hours, minute=0):
    """(start, end) on `day` days after `monday`, lasting `hours`"""
    start = monday + timedelta(days=day, hours=hour, minutes=minute)
    return start, start + timedelta(hours=hours)


def booking_payload(user_id, facility_id, start, end):
    return {
        "user_id": str(user_id),
        "facility_id": str(facility_id),
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
    }
