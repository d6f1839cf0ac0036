# Vocabulary and standard format entry

# Action envelope
DB_ACTION_OUTPUT = "DB_ACTION_OUTPUT"
DB_ACTION_WARNING = "DB_ACTION_WARNING"
DB_ACTION_ERROR = "DB_ACTION_ERROR"

# Request body keys
DATA = "data"
IDS = "ids"
QUERY = "query"
WHERE = "where"
FILTER = "filter"
IS_WARNING = "is_warning"
IS_COUNT_ONLY = "is_count_only"
DRY_RUN = "dry_run"
TOTAL_RECORDS = "total_records"

# Request headers
ACTOR_HEADER = "X-User-Id"

# Filter keywords
AND = "and"
OR = "or"

# Common columns
ID = "id"
IS_ACTIVE = "is_active"
IS_DELETED = "is_deleted"
ADDED_BY = "added_by"
UPDATED_BY = "updated_by"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
PASSWORD = "password"

# Entity kinds (table names)
USER = "user"
USER_AUTH_SETTINGS = "user_auth_settings"
USER_TOKEN = "user_token"
ROLE = "role"
PROJECT_ROUTE = "project_route"
ROUTE_ROLE = "route_role"
USER_ROLE = "user_role"
BLOG = "blog"

# Foreign key columns
USER_ID = "user_id"
ROLE_ID = "role_id"
ROUTE_ID = "route_id"
