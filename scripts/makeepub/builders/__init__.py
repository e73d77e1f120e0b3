from makeepub.builders.epub import EpubBuilder

BUILDERS = {
    "epub": EpubBuilder,
}

DEFAULT_FORMAT = "epub"
