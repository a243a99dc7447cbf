"""Wire and storage constants shared by the client modules."""

from __future__ import annotations

TOKEN_KEY = "authToken"
USER_KEY = "userData"
REMEMBER_ME_KEY = "rememberMe"
REMEMBER_ME_VALUE = "true"

CREDENTIAL_KEYS = (TOKEN_KEY, USER_KEY)

DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT_SECONDS = 5
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
DEFAULT_PERIOD = "30d"

TRANSACTION_TYPES = ("income", "expense")
SUMMARY_PERIODS = ("7d", "30d", "90d", "1y")
MAX_DESCRIPTION_LENGTH = 200

DEFAULT_USER_NAME = "Usuário"

LOGIN_PATH = "/users/login"
REGISTER_PATH = "/users/register"
PROFILE_PATH = "/users/profile/{user_id}"
STATS_PATH = "/users/stats/{user_id}"
TRANSACTIONS_PATH = "/transactions"
TRANSACTION_PATH = "/transactions/{transaction_id}"
USER_TRANSACTIONS_PATH = "/transactions/user/{user_id}"
SUMMARY_PATH = "/transactions/user/{user_id}/summary"
CATEGORIES_PATH = "/transactions/user/{user_id}/categories"

# Query string names used by the transactions listing endpoint
FILTER_PARAM_NAMES = {
    "page": "page",
    "limit": "limit",
    "category": "category",
    "type": "type",
    "start_date": "startDate",
    "end_date": "endDate",
}
