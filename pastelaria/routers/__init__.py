# pastelaria/routers/__init__.py

# Expõe os módulos para que "from pastelaria.routers import shifts" funcione
from . import auth
from . import users
from . import products
from . import shifts
from . import withdrawals
from . import records
from . import finance
from . import reports
from . import events
