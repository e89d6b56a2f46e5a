EXAMPLE_DOCUMENT = """\
<?xml version="1.0" encoding="utf-8"?>
<!--
  Search schema document.

  FullTextIndex     name (empty or omitted = default index), description,
                    stemming (true|false)
  ManagedProperty   name and type are required.
                    type: text, integer, decimal, datetime, yesno, binary, double
                    sort: disabled, enabled, latent
                    summary: disabled, static, dynamic
                    query, refine, stemming, merge: true|false
                    level: full-text importance 1-7, 0 or omitted = not mapped
  CrawledProperty   name and category are required.
                    type is only needed when the crawled property does not exist:
                    text, integer, double, decimal, datetime, boolean, binary, guid

  Attributes left out keep their current value in the search application.
  Crawled property mappings are synchronized exactly: mappings of a managed
  property that are not listed here are removed.
-->
<SearchSchema>
  <FullTextIndex>
    <ManagedProperty name="ProjectCode" type="text" description="Project code"
                     query="true" refine="true" sort="enabled" level="5">
      <CrawledProperty name="ows_ProjectCode" category="SharePoint" type="text"/>
      <CrawledProperty name="ProjectCode" category="Custom Metadata" type="text"/>
    </ManagedProperty>
    <ManagedProperty name="ProjectSummary" type="text" summary="dynamic" level="2">
      <CrawledProperty name="ows_ProjectSummary" category="SharePoint" type="text"/>
    </ManagedProperty>
  </FullTextIndex>
  <FullTextIndex name="ProjectIndex" description="Project documents" stemming="true">
    <ManagedProperty name="ProjectDue" type="datetime" sort="latent" query="true">
      <CrawledProperty name="ows_ProjectDue" category="SharePoint" type="datetime"/>
    </ManagedProperty>
  </FullTextIndex>
</SearchSchema>
"""
