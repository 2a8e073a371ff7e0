"""
Auth package for the LinkPro API.

Provides bearer-token authentication on top of `linkpro.identity`.
Designed to be modular and composable across multiple routers.
"""
