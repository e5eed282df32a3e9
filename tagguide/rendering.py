"""Render schema and appendix documents into the assembled tagging guide."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from tagguide.formatting import LINE_BREAK, format_field
from tagguide.schemas import FEATURE_FIELD_KINDS, AppendixDocument, Feature, SchemaDocument

DEFAULT_TITLE = "OSM Bike Ottawa Tagging Guide"
TOC_HEADING = "## Table of Contents"

TABLE_HEADER = "| Feature             | Description         | OSM Schema          | Photos              |"
TABLE_SEPARATOR = "|---------------------|---------------------|---------------------|---------------------|"

DEFAULT_FOOTER = """
[highway_cycleway]: http://wiki.openstreetmap.org/wiki/Tag:highway=cycleway
[cycleway]: http://wiki.openstreetmap.org/wiki/Key:cycleway
[highway]: http://wiki.openstreetmap.org/wiki/Key:highway
[path]: http://wiki.openstreetmap.org/wiki/Tag:highway=path
[bicycle]: http://wiki.openstreetmap.org/wiki/Key:bicycle
[surface]: https://wiki.openstreetmap.org/wiki/Key:surface
[fine_gravel]: https://wiki.openstreetmap.org/wiki/tag:surface=fine_gravel
[asphalt]: https://wiki.openstreetmap.org/wiki/tag:surface=asphalt
[smoothness]: https://wiki.openstreetmap.org/wiki/Key:smoothness
[access:conditional]: http://wiki.openstreetmap.org/wiki/Conditional_restrictions
[flood_prone]: http://wiki.openstreetmap.org/wiki/Key:flood_prone
[width]: http://wiki.openstreetmap.org/wiki/Key:width
[desire]: http://wiki.openstreetmap.org/wiki/Tag:path=desire
[hgv]: http://wiki.openstreetmap.org/wiki/Key:hgv
[barrier]: http://wiki.openstreetmap.org/wiki/Key:barrier
[cycle_barrier]: http://wiki.openstreetmap.org/wiki/Tag:barrier=cycle_barrier
[block]: https://wiki.openstreetmap.org/wiki/Tag:barrier=block
[buffer]: http://wiki.openstreetmap.org/wiki/Proposed_features/Buffered_bike_lane
[boardwalk]:http://wiki.openstreetmap.org/wiki/Tag:bridge=boardwalk
[ramp]:http://wiki.openstreetmap.org/wiki/Key:ramp
[steps]:http://wiki.openstreetmap.org/wiki/Tag:highway=steps
[shoulder]:http://wiki.openstreetmap.org/wiki/Key:shoulder
[share_busway]:http://wiki.openstreetmap.org/wiki/Tag:cycleway=share_busway
[parking:lane]:http://wiki.openstreetmap.org/wiki/Key:parking:lane
[seasonal]:http://wiki.openstreetmap.org/wiki/Key:seasonal
[segregated]:http://wiki.openstreetmap.org/wiki/Key:segregated
[bollard]: https://wiki.openstreetmap.org/wiki/Tag:barrier=bollard
[dismount]: http://wiki.openstreetmap.org/wiki/Key:access
[asl]: http://wiki.openstreetmap.org/wiki/Tag:cycleway=asl
[foot]: https://wiki.openstreetmap.org/wiki/Key:foot
[oneway]: http://wiki.openstreetmap.org/wiki/Key:oneway
[sharrows]: http://wiki.openstreetmap.org/wiki/Proposed_features/shared_lane
[bridge]: https://wiki.openstreetmap.org/wiki/Key:bridge
[traffic_sign]: https://wiki.openstreetmap.org/wiki/Key:traffic_sign
[lanes]: https://wiki.openstreetmap.org/wiki/Key:lanes
[maxspeed]: https://wiki.openstreetmap.org/wiki/Key:maxspeed
[access]: https://wiki.openstreetmap.org/wiki/Key:access
[parking]: https://wiki.openstreetmap.org/wiki/Key:parking
[swing_gate]: https://wiki.openstreetmap.org/wiki/Tag:barrier=swing_gate
[node]: /img/node.png "Node"
[way]: /img/way.png "Way"
[area]: /img/area.png "Area"
[relation]: /img/relation.png "Relation"
"""


@dataclass(frozen=True)
class Section:
    title: str
    anchor: str
    heading: str
    body: str


@dataclass(frozen=True)
class TocEntry:
    title: str
    anchor: str


def anchor_for_title(title: str) -> str:
    # Raw title, unescaped.
    return title


def render_heading(title: str, anchor: str) -> str:
    return f'<h2 id="{anchor}">{title}</h2>'


def build_toc(sections: Sequence[Section | TocEntry]) -> list[TocEntry]:
    return [TocEntry(title=section.title, anchor=section.anchor) for section in sections]


def render_toc(entries: Sequence[TocEntry]) -> str:
    lines = [TOC_HEADING, "", "<ul>"]
    for entry in entries:
        lines.append(f"  <li><a href='#{entry.anchor}'>{entry.title}</a></li>")
    lines.extend(["</ul>", "", ""])
    return "\n".join(lines)


def render_feature_row(feature: Feature) -> str:
    cells = {
        field_name: format_field(getattr(feature, field_name), kind, field_name=field_name)
        for field_name, kind in FEATURE_FIELD_KINDS.items()
    }
    return "|**{name}**|{description}|{elements}{br}{osm}|{photos}|".format(
        name=feature.name,
        description=cells["description"],
        elements=cells["elements"],
        br=LINE_BREAK,
        osm=cells["osm"],
        photos=cells["photos"],
    )


def render_schema_section(document: SchemaDocument) -> Section:
    anchor = anchor_for_title(document.title)
    lines: list[str] = []
    if document.introduction:
        lines.append(document.introduction)
    lines.append(TABLE_HEADER)
    lines.append(TABLE_SEPARATOR)
    lines.extend(render_feature_row(feature) for feature in document.features)
    return Section(
        title=document.title,
        anchor=anchor,
        heading=render_heading(document.title, anchor),
        body="\n".join(lines) + "\n",
    )


def render_appendix_section(document: AppendixDocument) -> Section:
    anchor = anchor_for_title(document.title)
    return Section(
        title=document.title,
        anchor=anchor,
        heading=render_heading(document.title, anchor),
        body=document.body,
    )


def render_section(section: Section) -> str:
    return f"{section.heading}\n\n{section.body}\n"


def assemble_document(
    schema_sections: Sequence[Section],
    appendix_sections: Sequence[Section],
    toc: Sequence[TocEntry],
    *,
    title: str = DEFAULT_TITLE,
    footer: str = DEFAULT_FOOTER,
) -> str:
    """Concatenate the guide in its fixed order.

    Title line, table of contents, schema sections, appendix sections and the
    footer, each group kept in the order it was supplied.
    """
    parts = [f"# {title}\n\n", render_toc(toc)]
    parts.extend(render_section(section) for section in schema_sections)
    parts.extend(render_section(section) for section in appendix_sections)
    parts.append(footer)
    return "".join(parts)


def find_duplicate_anchors(sections: Sequence[Section | TocEntry]) -> list[str]:
    counts = Counter(section.anchor for section in sections)
    return [anchor for anchor, count in counts.items() if count > 1]


def render_sections(
    schema_documents: Sequence[SchemaDocument],
    appendix_documents: Sequence[AppendixDocument],
) -> tuple[list[Section], list[Section], list[TocEntry]]:
    schema_sections = [render_schema_section(document) for document in schema_documents]
    appendix_sections = [render_appendix_section(document) for document in appendix_documents]
    toc = build_toc([*schema_sections, *appendix_sections])
    return schema_sections, appendix_sections, toc
