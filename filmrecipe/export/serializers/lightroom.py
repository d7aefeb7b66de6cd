# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Lightroom Classic / Camera Raw preset serializer (.xmp).

Produces an XMP packet whose single ``rdf:Description`` carries the preset
metadata as attributes and the develop settings as ``crs:`` elements.
Output is deterministic: the same recipe and include flags always give
byte-identical text.
"""

from __future__ import annotations

import logging
from typing import Optional

from filmrecipe.config import ExportConfig
from filmrecipe.export.serializers.base import content_digest, xml_escape
from filmrecipe.export.serializers.crs import (
    CRS_NAMESPACE,
    RDF_NAMESPACE,
    alt_element,
    develop_settings,
    sanitize_preset_name,
    select_camera_profile,
)
from filmrecipe.schema import AdjustmentModel, IncludeFlags

logger = logging.getLogger(__name__)

XMP_PACKET_ID = "W5M0MpCehiHzreSzNTczkc9d"


def to_lightroom_preset(
    model: AdjustmentModel,
    include: Optional[IncludeFlags] = None,
    *,
    config: Optional[ExportConfig] = None,
) -> str:
    """Serialize a recipe as a Lightroom develop preset.

    Args:
        model: The recipe.
        include: Section gates and strength; defaults to IncludeFlags().
        config: Group and cluster names.

    Returns:
        Complete XMP document text.

    Example (abridged)::

        <?xpacket begin="..." id="W5M0MpCehiHzreSzNTczkc9d"?>
        <x:xmpmeta xmlns:x="adobe:ns:meta/">
          <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
            <rdf:Description
              xmlns:crs="http://ns.adobe.com/camera-raw-settings/1.0/"
              crs:Version="17.5"
              ...
              crs:Name="Portra Warm">
              <crs:Name>...</crs:Name>
              <crs:Treatment>Color</crs:Treatment>
              <crs:Temperature>5600</crs:Temperature>
              ...
            </rdf:Description>
          </rdf:RDF>
        </x:xmpmeta>
        <?xpacket end="w"?>
    """
    include = include or IncludeFlags()
    config = config or ExportConfig()

    name = xml_escape(sanitize_preset_name(model.preset_name))
    profile = xml_escape(select_camera_profile(model))
    cluster = xml_escape(config.cluster)

    lines = [
        f'<?xpacket begin="\ufeff" id="{XMP_PACKET_ID}"?>',
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">',
        f'  <rdf:RDF xmlns:rdf="{RDF_NAMESPACE}">',
        "    <rdf:Description",
        f'      xmlns:crs="{CRS_NAMESPACE}"',
        '      crs:Version="17.5"',
        '      crs:ProcessVersion="15.4"',
        f'      crs:ProfileName="{profile}"',
        '      crs:Look=""',
        '      crs:HasSettings="True"',
        '      crs:PresetType="Normal"',
        f'      crs:Cluster="{cluster}"',
        f'      crs:ClusterGroup="{cluster}"',
        '      crs:PresetSubtype="Normal"',
        '      crs:SupportsAmount="True"',
        '      crs:SupportsAmount2="True"',
        '      crs:SupportsColor="True"',
        '      crs:SupportsMonochrome="True"',
        f'      crs:Name="{name}">',
    ]
    lines += alt_element("Name", sanitize_preset_name(model.preset_name))
    lines += alt_element("Group", config.group_name)
    lines += develop_settings(
        model,
        include,
        strength=include.strength,
        allow_masks=True,
        seed=content_digest(model, include),
    )
    lines += [
        "    </rdf:Description>",
        "  </rdf:RDF>",
        "</x:xmpmeta>",
        '<?xpacket end="w"?>',
    ]

    logger.debug("Serialized Lightroom preset %r (%d lines)", name, len(lines))
    return "\n".join(lines) + "\n"
