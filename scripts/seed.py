from sqlmodel import Session

from planitech.core.config import settings
from planitech.core.logging import configure_logging
from planitech.db.session import engine, init_db
from planitech.db.seed import seed_all


def run_seed() -> None:
    configure_logging()
    init_db()
    with Session(engine) as session:
        seed_all(session=session, seed_path=settings.SEED_PATH)


if __name__ == "__main__":
    run_seed()
