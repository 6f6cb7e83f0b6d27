import sys

from game_catalog_api.app.core.security import create_access_token

# cid пользователя у провайдера идентификации; срок действия 30 дней (секунды)
cid = sys.argv[1] if len(sys.argv) > 1 else "admin"
token = create_access_token({"sub": cid}, expires_delta=30*24*60*60)
print(token)
