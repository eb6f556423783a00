"""
Tabular marketplace page adapter (freelancer.com project table).

Each `tr.project-details` row is one project. Its cells carry no names,
so they are read by position using ROW_FIELDS. If the site changes its
column layout the row either has too few cells (ParseError) or the
named accessors below make the misassignment easy to see in tests.

A listing is kept when the row's skill tags intersect the configured
skills.
"""

from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from projects_notifier.ingestion.base_adapter import SourceAdapter, clean_text, match_skills
from projects_notifier.ingestion.schemas import Listing, SourceTag

# Fixed column order of a project row
ROW_FIELDS = (
    "title",
    "description",
    "bid_count",
    "skills",
    "started",
    "ends",
    "price",
)


class ProjectRow:
    """Named access to the positional cells of one project row."""

    def __init__(self, row: Tag):
        self.cells = row.find_all("td", recursive=False)
        if len(self.cells) < len(ROW_FIELDS):
            raise ValueError(
                f"project row has {len(self.cells)} cells, expected {len(ROW_FIELDS)}"
            )

    def cell(self, name: str) -> Tag:
        return self.cells[ROW_FIELDS.index(name)]

    @property
    def title_cell(self) -> Tag:
        cell = self.cell("title")
        # Promotion badges sit inside the title cell
        for promotions in cell.select("ul.promotions"):
            promotions.decompose()
        return cell

    @property
    def description(self) -> str:
        return clean_text(self.cell("description").get_text(" "))

    @property
    def bid_count(self) -> str:
        return clean_text(self.cell("bid_count").get_text())

    @property
    def skills(self) -> list[str]:
        return [clean_text(a.get_text()) for a in self.cell("skills").find_all("a")]

    @property
    def price(self) -> str:
        return clean_text(self.cell("price").get_text(" "))


class HtmlTableAdapter(SourceAdapter):
    """Skill-filtered adapter for the freelancer.com project table."""

    @property
    def source_tag(self) -> SourceTag:
        return SourceTag.FR

    async def _fetch_document(self) -> str:
        response = await self.client.get(self.endpoint)
        return response.text

    def _parse_document(self, document: str) -> list[Listing]:
        soup = BeautifulSoup(document, "html.parser")

        listings = []
        for tr in soup.select("tr.project-details"):
            self._stats.listings_parsed += 1
            row = ProjectRow(tr)

            link = row.title_cell.find("a")
            if link is None:
                raise self.parse_error("project row without title link")

            skills = match_skills(row.skills, self.config.skills)
            if not skills:
                continue

            listings.append(
                Listing(
                    title=clean_text(link.get_text()),
                    url=urljoin(self.endpoint, link.get("href", "")),
                    description=row.description,
                    bid_count=row.bid_count,
                    skill_tags=tuple(skills),
                    price=row.price,
                    source_tag=self.source_tag,
                )
            )

        return listings
