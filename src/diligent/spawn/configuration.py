"""Translate a spawn config into host spawn properties."""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from diligent.hosts.base import Host, Tag

logger = logging.getLogger(__name__)

SIZE_KEYS = ("width", "height")


class PropertyBuilder:
    """Builds the property dict passed to Host.spawn()."""

    def __init__(self, host: Host):
        self.host = host

    def build(
        self,
        tag: Optional[Tag],
        config: Optional[Union[Mapping[str, Any], bool]] = None,
    ) -> Dict[str, Any]:
        """
        Args:
            tag: Resolved tag, or None to let the host decide
            config: Spawn options (floating, placement, width, height); others are ignored

        Returns:
            Property dict for Host.spawn()
        """
        properties: Dict[str, Any] = {}
        if tag is not None:
            properties["tag"] = tag

        if not config:
            return properties

        if config.get("floating"):
            properties["floating"] = True

        placement_name = config.get("placement")
        if placement_name:
            placement = self.host.get_placement(placement_name)
            if placement is not None:
                properties["placement"] = placement
            else:
                logger.warning("unknown placement %r ignored", placement_name)

        for key in SIZE_KEYS:
            if config.get(key) is not None:
                properties[key] = config[key]

        return properties
