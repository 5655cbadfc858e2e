"""
ASGI entry point.

For running under an external ASGI server:

    uvicorn ciudadano_digital.main:app --port 3000

`python -m ciudadano_digital` is the preferred way to start the service; it
also installs the process exception hooks.
"""
from ciudadano_digital.core.application import create_application
from ciudadano_digital.core.setup import setup_application

settings = setup_application()

app = create_application(settings)
