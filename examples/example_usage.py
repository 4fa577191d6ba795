"""Example: call the service layer directly (no Flask).

Controllers are a thin layer; the business rules live in the services.
"""

import importlib

from config import get_settings_module

from src.activity_tracker.activity_tracker.container import build_container
from src.activity_tracker.activity_tracker.core.enums import Role
from src.activity_tracker.activity_tracker.users.model import Requester


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, upload_dir=settings.UPLOAD_DIR)

    admin = Requester(user_id=1, role=Role.SUPERADMIN)
    report = container.report_service.generate_report(admin, department="Computer Science")
    for row in report.rows:
        print(row.to_dict())


if __name__ == "__main__":
    main()
