import uvicorn


def run() -> None:
    uvicorn.run(
        "helpdesk.backend.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    run()
