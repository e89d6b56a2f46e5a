"""Schema document loading.

Reads an XML or YAML schema document and returns a validated SchemaDocument.
Only structure is checked here (root element, required attributes, literal
booleans and integer levels); type names and level ranges are checked by the
reconcilers.

XML layout::

    <SearchSchema>
      <FullTextIndex name="" description="" stemming="true|false">
        <ManagedProperty name="" type="" level="0-7" ...>
          <CrawledProperty name="" category="" type=""/>
        </ManagedProperty>
      </FullTextIndex>
    </SearchSchema>
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from lxml import etree
from pydantic import ValidationError

from search_schema.exceptions import DocumentInvalid
from search_schema.schema_models import SchemaDocument

logger = logging.getLogger(__name__)

ROOT_TAG = "SearchSchema"
FULL_TEXT_INDEX_TAG = "FullTextIndex"
MANAGED_PROPERTY_TAG = "ManagedProperty"
CRAWLED_PROPERTY_TAG = "CrawledProperty"

YAML_SUFFIXES = {".yaml", ".yml"}


def _local_name(element: Any) -> str:
    return etree.QName(element).localname


def _children(element: Any, expected: str, errors: List[str]) -> List[Any]:
    found = []
    for child in element.iterchildren(tag=etree.Element):
        if _local_name(child) == expected:
            found.append(child)
        else:
            errors.append(
                f"line {child.sourceline}: unexpected <{_local_name(child)}> "
                f"inside <{_local_name(element)}>, expected <{expected}>"
            )
    return found


def xml_to_dict(root: Any) -> Dict[str, Any]:
    """Convert the XML tree into the nested dictionaries SchemaDocument expects."""
    if _local_name(root) != ROOT_TAG:
        raise DocumentInvalid(
            f"Root element must be <{ROOT_TAG}>, found <{_local_name(root)}>"
        )
    errors: List[str] = []
    indexes = []
    for index_el in _children(root, FULL_TEXT_INDEX_TAG, errors):
        managed = []
        for prop_el in _children(index_el, MANAGED_PROPERTY_TAG, errors):
            crawled = [
                dict(cp_el.attrib)
                for cp_el in _children(prop_el, CRAWLED_PROPERTY_TAG, errors)
            ]
            managed.append({**prop_el.attrib, "crawled_properties": crawled})
        indexes.append({**index_el.attrib, "managed_properties": managed})
    if errors:
        raise DocumentInvalid("Schema document has unexpected elements", errors=errors)
    return {"full_text_indexes": indexes}


def _format_errors(exc: ValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}")
    return messages


def parse_xml(content: Union[str, bytes]) -> Dict[str, Any]:
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    if isinstance(content, str):
        content = content.encode("utf-8")
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as e:
        raise DocumentInvalid(f"Schema document is not well-formed XML: {e}", cause=e) from e
    return xml_to_dict(root)


def parse_yaml(content: Union[str, bytes]) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DocumentInvalid(f"Schema document is not valid YAML: {e}", cause=e) from e
    if not isinstance(data, dict) or "full_text_indexes" not in data:
        raise DocumentInvalid(
            "YAML schema document must be a mapping with a 'full_text_indexes' list"
        )
    return data


def validate_document(data: Dict[str, Any], path: str = "<string>") -> SchemaDocument:
    try:
        return SchemaDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentInvalid(
            "Schema document failed validation", path=path, errors=_format_errors(e)
        ) from e


def load_document(path: Union[str, Path]) -> SchemaDocument:
    """Read and validate a schema document from disk.

    Raises:
        DocumentInvalid: If the file is missing, malformed or incomplete.
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise DocumentInvalid(
            f"Cannot read schema document: {e}", path=str(path), cause=e
        ) from e

    if path.suffix.lower() in YAML_SUFFIXES:
        data = parse_yaml(content)
    else:
        data = parse_xml(content)
    document = validate_document(data, str(path))
    logger.debug(
        f"Loaded schema document {path}: "
        f"{len(document.full_text_indexes)} full-text index(es)"
    )
    return document
