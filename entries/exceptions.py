# entries/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException


class EntryConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "An entry already exists for this date."
    default_code = "entry_conflict"

    def __init__(self, entry_date):
        super().__init__(f"An entry already exists for date {entry_date.isoformat()}")
        self.entry_date = entry_date


class EntryNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Entry not found."
    default_code = "entry_not_found"

    def __init__(self, entry_date):
        super().__init__(f"Entry for date {entry_date.isoformat()} not found")
        self.entry_date = entry_date
