# API routes module
# Contains all API endpoint definitions; routers are imported from their
# modules directly (services import api.models, so this stays import-free).
