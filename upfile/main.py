"""upfile - uploaded file handling for Robyn services."""

from robyn import Robyn

from upfile.api.files import store_uploads
from upfile.core.logger import LogIcon, logger
from upfile.core.router import Router
from upfile.core.settings import settings as st

app = Robyn(__file__)

# Routers
upload_router = Router(__file__, prefix="/files")
upload_router.post("/upload")(store_uploads)

app.include_router(upload_router)


def main() -> None:
    logger.info(
        "Starting %s %s | HOST=%s | PORT=%s", st.API_NAME, st.API_VERSION, st.API_HOST, st.API_PORT, icon=LogIcon.START
    )
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
