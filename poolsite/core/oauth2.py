from fastapi.security import OAuth2PasswordBearer

# Bearer tokens are optional: browsers authenticate with the session cookie
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/admin/token", auto_error=False)
