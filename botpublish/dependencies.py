from typing import Annotated

from fastapi import Depends

from botpublish.services.publisher import PublishCoordinator, get_publisher

# Type aliases for dependency injection
Publisher = Annotated[PublishCoordinator, Depends(get_publisher)]
