"""factorkb/symbolic — factor algebra, propagation and the knowledge base."""
