from typing import Annotated
from fastapi import Depends
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity

# Any authenticated employee, no permission check
identity_dependency = Annotated[Identity, Depends(AuthDependencies.get_identity)]
