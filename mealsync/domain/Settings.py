"""UserSettings: split-ownership record.

api_key_secret never leaves the device; cook_name and cook_contact_number
are the only fields eligible for remote sync.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict


@dataclass
class UserSettings:
    api_key_secret: str = ""
    cook_name: str = ""
    cook_contact_number: str = ""

    def synced_dict(self) -> Dict[str, str]:
        return {"cookName": self.cook_name, "cookContactNumber": self.cook_contact_number}
