"""kopf handlers; importing this package registers them."""

from . import ilm_policy  # noqa: F401
