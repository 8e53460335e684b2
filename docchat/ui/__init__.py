"""NiceGUI interface - thin presentation layer over the client state.

Responsibilities:
    - Document library with single and multi selection
    - File upload with client-side validation feedback
    - Chat pane for the selected documents
    - Collection statistics

Contains no state transitions of its own. Delegates all operations to
docchat.state.
"""
