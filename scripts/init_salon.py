import os
import sys
import pathlib
from datetime import time

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from sqlalchemy import select, text

from salon_booking.database import SessionLocal, init_db
from salon_booking.models import Salons, WorkingHours


# ======================================================
# ENV
# ======================================================

SALON_NAME = os.getenv("SALON_NAME", "Default Salon")

# Mon–Sat 09:00–18:00, break 12:00–13:00, Sunday closed
DEFAULT_HOURS = {
    weekday: (time(9), time(18), time(12), time(13))
    for weekday in range(1, 7)
}


# ======================================================
# SEED
# ======================================================

def ensure_salon(db) -> Salons:
    salon = db.execute(select(Salons).where(Salons.name == SALON_NAME)).scalar_one_or_none()
    if salon:
        print(f"Salon exists: id={salon.id} name={salon.name}")
        return salon

    salon = Salons(name=SALON_NAME)
    db.add(salon)
    db.flush()

    for weekday in range(7):
        start, end, break_start, break_end = DEFAULT_HOURS.get(weekday, (None, None, None, None))
        db.add(WorkingHours(
            salon_id=salon.id,
            weekday=weekday,
            start_time=start,
            end_time=end,
            break_start=break_start,
            break_end=break_end,
        ))

    db.commit()
    print(f"Salon created: id={salon.id} name={salon.name}")
    return salon


def main():
    init_db()

    db = SessionLocal()
    try:
        print("DB OK:", db.execute(text("SELECT 1")).scalar())
        ensure_salon(db)
        print("Salons:", len(db.execute(select(Salons)).scalars().all()))
    finally:
        db.close()


if __name__ == "__main__":
    main()
