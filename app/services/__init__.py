# Services package.
#
# One module per resource, each a set of async functions holding the
# business rules and database access:
#
#   category_service : list + unique-name create for Category
#   post_service     : paginated search/filter listing + CRUD for Post
#   comment_service  : list by post, create, author-only delete for Comment
#   user_service     : create/get for User (comment author lookup)
#
# Every function takes an AsyncSession first; the router layer owns the
# transaction through the ``get_db`` dependency.  Failures are raised as
# the typed errors in ``app.errors``.
