"""User-facing strings of the Evernote repository (English)."""

STRINGS: dict[str, str] = {
    "allnotes": "All notes",
    "cannotdownload": "Cannot download this file",
    "configplugin": "Evernote configuration",
    "evernote": "Evernote",
    "evernote:view": "View Evernote repository",
    "key": "Consumer key",
    "lostsource": "Error! Source is missing. {source}",
    "nopermissiontoaccessnotes": "You do not have the permission to access those notes.",
    "notebooks": "Notebooks",
    "pluginname": "Evernote",
    "pluginname_help": "Repository on Evernote",
    "referencedetails": "{name}: file of {fullname}",
    "requesttokenerror": "Could not get a request token from Evernote. Please try again later.",
    "savedsearchs": "Saved searchs",
    "searchresults": "Search results",
    "secret": "Consumer secret",
    "sharingerror": "Error while sharing the note to get a download URL",
    "sourceinfo": "Evernote ({fullname}): {source}",
    "tags": "Tags",
    "usedevapi": "Use the developer API",
    "usedevapi_info": "Connects to the sandbox server, for testing purposes only.",
}


def get_string(identifier: str, **params: str) -> str:
    """Return the string for ``identifier``, formatted with ``params``.

    Unknown identifiers are returned in brackets so they stand out in the UI.
    """
    template = STRINGS.get(identifier)
    if template is None:
        return f"[[{identifier}]]"
    return template.format(**params) if params else template
