from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from ...core.model import Dimensions, Region, RegionType

if TYPE_CHECKING:
    from ...editor import FloorplanEditor


@dataclass(frozen=True)
class RegionSummary:
    id: str
    name: str
    type: RegionType
    point_count: int
    incomplete: bool
    dimensions: Optional[Dimensions]
    stale_dimensions: bool

    @property
    def label(self) -> str:
        text = f"{self.name} ({self.type.value}, {self.point_count} points)"
        if self.incomplete:
            text += " - Incomplete"
        elif self.dimensions is not None:
            text += f" - {self.dimensions.area}m²"
            if self.stale_dimensions:
                text += " (stale)"
        return text


def region_summaries(regions: Sequence[Region], pixels_per_metre: Optional[float]) -> List[RegionSummary]:
    summaries = []
    for region in regions:
        complete = region.is_complete
        summaries.append(
            RegionSummary(
                id=region.id,
                name=region.name,
                type=region.type,
                point_count=len(region.points),
                incomplete=not complete,
                dimensions=region.dimensions if complete else None,
                stale_dimensions=complete and region.has_stale_dimensions(pixels_per_metre),
            )
        )
    return summaries


def find_region(editor: "FloorplanEditor", region_id: str) -> Region:
    for region in editor.state.regions:
        if region.id == region_id:
            return region
    raise KeyError(region_id)


def rename_region(editor: "FloorplanEditor", region_id: str, name: str) -> Region:
    region = find_region(editor, region_id)
    region.name = name.strip() or region.name
    editor.redraw()
    return region


def set_region_type(editor: "FloorplanEditor", region_id: str, region_type: Union[RegionType, str]) -> Region:
    region = find_region(editor, region_id)
    region.type = RegionType(region_type)
    editor.redraw()
    return region


def delete_region(editor: "FloorplanEditor", region_id: str) -> Region:
    region = find_region(editor, region_id)
    editor.state.regions.remove(region)
    editor.redraw()
    return region


def clear_regions(editor: "FloorplanEditor") -> int:
    count = len(editor.state.regions)
    editor.state.regions.clear()
    editor.state.draw.clear()
    editor.redraw()
    return count
