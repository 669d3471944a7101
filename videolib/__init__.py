"""
Personal video library: catalog, tags, search, thumbnails and previews.
"""
