from contentforge.schema import CaptionItem
from contentforge.sources import PdfFetcher, extract_pdf_text


def format_captions(captions: list[str]) -> list[CaptionItem]:
    return [CaptionItem(id=index, content=content) for index, content in enumerate(captions)]


async def load_pdf_text(url: str, fetcher: PdfFetcher) -> str:
    data = await fetcher.fetch(url)
    return await extract_pdf_text(data)
