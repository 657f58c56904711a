"""Worker script to run Celery workers."""

import logging

from workers.celery_app import celery_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

if __name__ == "__main__":
    # Worker with embedded beat so the hourly cleanup runs without a separate process
    celery_app.worker_main(
        argv=[
            "worker",
            "--beat",
            "--loglevel=info",
            "--concurrency=2",
            "-Q",
            "default,maintenance",
        ]
    )
