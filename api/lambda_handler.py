"""
Lambda entrypoint for the Spyglass request-forwarding API.
Deploy as a container image; API Gateway events are translated by Mangum.
"""
from mangum import Mangum
from api.main import app

handler = Mangum(app, lifespan="off")
