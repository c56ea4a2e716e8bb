"""Ratelimited client and models for the NS API.
See https://www.nationstates.net/pages/api.html for NS API details.
"""

from nsshards.core import *
from nsshards.exceptions import *
from nsshards.ratelimit import *
from nsshards.shards import *
from nsshards.uri import *
from nsshards.parser import *
from nsshards.models import *
from nsshards.dumps import *
from nsshards.api import *
