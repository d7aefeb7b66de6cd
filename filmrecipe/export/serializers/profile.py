# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Lightroom camera profile serializer (.xmp, ``PresetType="Look"``).

Profiles are applied as a base rendering and cannot hold local
adjustments, so the mask section is never written regardless of the
include flags. Values are scaled by the configured profile strength
instead of ``include.strength``.
"""

from __future__ import annotations

from typing import Optional

from filmrecipe.config import ExportConfig
from filmrecipe.export.serializers.base import content_digest, stable_uuid
from filmrecipe.export.serializers.crs import (
    CRS_NAMESPACE,
    RDF_NAMESPACE,
    alt_element,
    develop_settings,
    sanitize_preset_name,
)
from filmrecipe.schema import AdjustmentModel, IncludeFlags

DEFAULT_DESCRIPTION = "Camera profile generated from Film Recipe Wizard"

XMP_TOOLKIT = "Adobe XMP Core 7.0-c000 1.000000, 0000/00/00-00:00:00"


def to_lightroom_profile(
    model: AdjustmentModel,
    include: Optional[IncludeFlags] = None,
    *,
    config: Optional[ExportConfig] = None,
) -> str:
    """Serialize a recipe as a Lightroom look profile."""
    include = include or IncludeFlags()
    config = config or ExportConfig()
    digest = content_digest(model, include)
    name = sanitize_preset_name(model.preset_name)

    lines = [
        f'<x:xmpmeta xmlns:x="adobe:ns:meta/" x:xmptk="{XMP_TOOLKIT}">',
        f'  <rdf:RDF xmlns:rdf="{RDF_NAMESPACE}">',
        '    <rdf:Description rdf:about=""',
        f'      xmlns:crs="{CRS_NAMESPACE}"',
        '      crs:PresetType="Look"',
        '      crs:Cluster=""',
        f'      crs:UUID="{stable_uuid(digest, "profile")}"',
        '      crs:SupportsAmount="true"',
        '      crs:SupportsColor="true"',
        '      crs:SupportsMonochrome="true"',
        '      crs:SupportsHighDynamicRange="true"',
        '      crs:SupportsNormalDynamicRange="true"',
        '      crs:SupportsSceneReferred="true"',
        '      crs:SupportsOutputReferred="true"',
        '      crs:CameraModelRestriction=""',
        '      crs:Copyright=""',
        '      crs:ContactInfo=""',
        '      crs:Version="16.5"',
        '      crs:ProcessVersion="15.4"',
        '      crs:HasSettings="true">',
    ]
    lines += alt_element("Name", name)
    lines += alt_element("ShortName", name)
    lines += alt_element("Group", config.group_name)
    lines += alt_element("Description", model.description or DEFAULT_DESCRIPTION)
    lines += develop_settings(
        model,
        include,
        strength=config.profile_strength,
        allow_masks=False,
        seed=digest,
    )
    lines += [
        "    </rdf:Description>",
        "  </rdf:RDF>",
        "</x:xmpmeta>",
    ]
    return "\n".join(lines) + "\n"
