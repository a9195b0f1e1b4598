# Utils package for SaveBite backend
