# Services package.
#
# Each module exposes a focused set of async functions for one aggregate:
#
#   article_service  - create/update/list/view + population for Article
#   comment_service  - comment creation and removal
#   user_service     - read/edit/remove for User
#   cascade          - deletion policies and the cross-entity removal rules
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
